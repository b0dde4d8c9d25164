from setuptools import setup, find_packages

# Read requirements from requirements.txt
with open('requirements.txt') as f:
    requirements = [line.strip() for line in f.read().splitlines() if line.strip() and not line.startswith('#')]

# Get the long description from the README file
with open('README.md', 'r', encoding='utf-8') as f:
    long_description = f.read()

setup(
    name="phantom-pbip",
    version="1.0.0",
    description="Export Phantom dashboards as Power BI Projects (PBIP) with a synthesized semantic model",
    long_description=long_description,
    long_description_content_type='text/markdown',
    author="Phantom Team",
    packages=find_packages(include=['phantom_pbip', 'phantom_pbip.*']),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        "console_scripts": [
            "phantom-pbip=phantom_pbip.main:main",
        ],
    },
    python_requires=">=3.10",
    package_data={
        'phantom_pbip': [
            'templates/*',
            'config/*.yaml',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
