"""
Tests for the asynchronous export entry point
"""

import asyncio

from phantom_pbip import create_pbip_package, create_pbip_package_async


class TestAsyncExport:

    def test_same_bytes_as_sync(self, retail_items, retail_state):
        sync_package = create_pbip_package(retail_items, 'Retail', retail_state)
        async_package = asyncio.run(create_pbip_package_async(retail_items, 'Retail', retail_state))
        assert async_package.blob == sync_package.blob
        assert async_package.files == sync_package.files
        assert async_package.manifest == sync_package.manifest

    def test_concurrent_exports_are_independent(self, retail_items):
        async def run_all():
            return await asyncio.gather(
                create_pbip_package_async(retail_items, 'Retail'),
                create_pbip_package_async([], 'SaaS'),
            )

        retail, saas = asyncio.run(run_all())
        assert retail.project_name == 'PhantomRetail'
        assert saas.project_name == 'PhantomSaaS'
        assert retail.blob != saas.blob
