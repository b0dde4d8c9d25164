"""
Scenario KPI catalog.

Each scenario maps to an ordered tuple of builder functions; every builder
returns one literal DAX measure over that scenario's schema.
"""
from typing import Callable, Dict, List, Tuple

from ..models import DAXMeasure, Scenario
from ..scenarios import get_fact_table_for_scenario

KPIBuilder = Callable[[], DAXMeasure]


def _ratio(numerator_var: str, numerator: str, denominator_var: str, denominator: str, guard: str = '> 0') -> str:
    return (
        f"VAR {numerator_var} = {numerator}\n"
        f"VAR {denominator_var} = {denominator}\n"
        f"RETURN\n"
        f"IF({denominator_var} {guard}, DIVIDE({numerator_var}, {denominator_var}), BLANK())"
    )


def _growth(ac: str, py: str) -> str:
    return (
        f"VAR _AC = {ac}\n"
        f"VAR _PY = {py}\n"
        "RETURN\n"
        "IF(_PY <> 0, DIVIDE(_AC - _PY, ABS(_PY)), BLANK())"
    )


# Retail

def margin_percent() -> DAXMeasure:
    return DAXMeasure(
        name='Margin %',
        expression=_ratio('_Profit', 'SUM(Sales[Profit])', '_Revenue', 'SUM(Sales[Revenue])', '<> 0'),
        format_string='0.0%',
        display_folder='Retail KPIs',
        description='Profit margin as percentage of revenue',
    )


def yoy_growth() -> DAXMeasure:
    return DAXMeasure(
        name='YoY Growth',
        expression=_growth('SUM(Sales[Revenue])', 'SUM(Sales[RevenuePY])'),
        format_string='0.0%',
        display_folder='Retail KPIs',
        description='Year-over-year revenue growth percentage',
    )


def revenue_per_store() -> DAXMeasure:
    return DAXMeasure(
        name='Revenue per Store',
        expression=_ratio('_Revenue', 'SUM(Sales[Revenue])', '_Stores', 'DISTINCTCOUNT(Sales[StoreID])'),
        format_string='$#,##0',
        display_folder='Retail KPIs',
        description='Average revenue per store',
    )


def avg_order_value() -> DAXMeasure:
    return DAXMeasure(
        name='Avg Order Value',
        expression=_ratio('_Revenue', 'SUM(Sales[Revenue])', '_Orders', 'COUNTROWS(Sales)'),
        format_string='$#,##0.00',
        display_folder='Retail KPIs',
        description='Average revenue per transaction',
    )


# SaaS

def churn_rate() -> DAXMeasure:
    return DAXMeasure(
        name='Churn Rate',
        expression=_ratio('_Churned', 'CALCULATE(COUNTROWS(Subscription), Subscription[Churn] = 1)',
                          '_Total', 'COUNTROWS(Subscription)'),
        format_string='0.0%',
        display_folder='SaaS KPIs',
        description='Percentage of subscriptions that churned',
    )


def arr() -> DAXMeasure:
    return DAXMeasure(
        name='ARR',
        expression='SUM(Subscription[MRR]) * 12',
        format_string='$#,##0',
        display_folder='SaaS KPIs',
        description='Annual Recurring Revenue (MRR x 12)',
    )


def customer_count() -> DAXMeasure:
    return DAXMeasure(
        name='Customer Count',
        expression='DISTINCTCOUNT(Subscription[CustomerID])',
        format_string='#,##0',
        display_folder='SaaS KPIs',
        description='Count of unique customers',
    )


def arpu() -> DAXMeasure:
    return DAXMeasure(
        name='ARPU',
        expression=_ratio('_TotalMRR', 'SUM(Subscription[MRR])',
                          '_Customers', 'DISTINCTCOUNT(Subscription[CustomerID])'),
        format_string='$#,##0',
        display_folder='SaaS KPIs',
        description='Average MRR per customer',
    )


# HR

def headcount() -> DAXMeasure:
    return DAXMeasure(
        name='Headcount',
        expression='COUNTROWS(Employee)',
        format_string='#,##0',
        display_folder='HR KPIs',
        description='Total employee headcount',
    )


def attrition_rate() -> DAXMeasure:
    return DAXMeasure(
        name='Attrition Rate',
        expression=_ratio('_Attrited', 'CALCULATE(COUNTROWS(Employee), Employee[Attrition] = 1)',
                          '_Total', 'COUNTROWS(Employee)'),
        format_string='0.0%',
        display_folder='HR KPIs',
        description='Percentage of employees who have left',
    )


def avg_performance_rating() -> DAXMeasure:
    return DAXMeasure(
        name='Avg Performance Rating',
        expression='AVERAGE(Employee[Rating])',
        format_string='0.0',
        display_folder='HR KPIs',
        description='Average employee performance rating (1-5 scale)',
    )


def avg_tenure() -> DAXMeasure:
    return DAXMeasure(
        name='Avg Tenure',
        expression='AVERAGE(Employee[Tenure])',
        format_string='0.0',
        display_folder='HR KPIs',
        description='Average employee tenure in years',
    )


# Logistics

def total_shipments() -> DAXMeasure:
    return DAXMeasure(
        name='Total Shipments',
        expression='COUNTROWS(Shipment)',
        format_string='#,##0',
        display_folder='Logistics KPIs',
        description='Total number of shipments',
    )


def on_time_rate() -> DAXMeasure:
    return DAXMeasure(
        name='On-Time Rate',
        expression=_ratio('_OnTime', 'CALCULATE(COUNTROWS(Shipment), Shipment[OnTime] = 1)',
                          '_Total', 'COUNTROWS(Shipment)'),
        format_string='0.0%',
        display_folder='Logistics KPIs',
        description='Percentage of shipments delivered on time',
    )


def avg_shipment_cost() -> DAXMeasure:
    return DAXMeasure(
        name='Avg Shipment Cost',
        expression='AVERAGE(Shipment[Cost])',
        format_string='$#,##0.00',
        display_folder='Logistics KPIs',
        description='Average cost per shipment',
    )


def _status_count(status: str) -> KPIBuilder:
    def build() -> DAXMeasure:
        return DAXMeasure(
            name=f'{status} Count',
            expression=f'CALCULATE(COUNTROWS(Shipment), Shipment[Status] = "{status}")',
            format_string='#,##0',
            display_folder='Logistics KPIs',
            description=f'Count of shipments with {status} status',
        )
    build.__name__ = f"{status.lower().replace(' ', '_')}_count"
    return build


delivered_count = _status_count('Delivered')
in_transit_count = _status_count('In Transit')
delayed_count = _status_count('Delayed')


# Finance

def budget_variance_percent() -> DAXMeasure:
    return DAXMeasure(
        name='Budget Variance %',
        expression=(
            'VAR _Actual = CALCULATE(SUM(FinanceRecord[Amount]), FinanceRecord[Scenario] = "Actual")\n'
            'VAR _Budget = CALCULATE(SUM(FinanceRecord[Amount]), FinanceRecord[Scenario] = "Budget")\n'
            'RETURN\n'
            'IF(_Budget <> 0, DIVIDE(_Actual - _Budget, ABS(_Budget)), BLANK())'
        ),
        format_string='0.0%',
        display_folder='Finance KPIs',
        description='Actual vs Budget variance percentage',
    )


def forecast_accuracy() -> DAXMeasure:
    return DAXMeasure(
        name='Forecast Accuracy',
        expression=(
            'VAR _Actual = CALCULATE(SUM(FinanceRecord[Amount]), FinanceRecord[Scenario] = "Actual")\n'
            'VAR _Forecast = CALCULATE(SUM(FinanceRecord[Amount]), FinanceRecord[Scenario] = "Forecast")\n'
            'RETURN\n'
            'IF(_Forecast <> 0, 1 - ABS(DIVIDE(_Actual - _Forecast, _Forecast)), BLANK())'
        ),
        format_string='0.0%',
        display_folder='Finance KPIs',
        description='Forecast accuracy (1 - absolute percentage error)',
    )


def net_variance() -> DAXMeasure:
    return DAXMeasure(
        name='Net Variance',
        expression='SUM(FinanceRecord[Variance])',
        format_string='$#,##0',
        display_folder='Finance KPIs',
        description='Total variance (Actual - Budget)',
    )


# Portfolio

def unique_entities() -> DAXMeasure:
    return DAXMeasure(
        name='Unique Entities',
        expression='DISTINCTCOUNT(ControversyScore[EntityID])',
        format_string='#,##0',
        display_folder='Portfolio KPIs',
        description='Count of unique entities in the portfolio',
    )


def above_threshold() -> DAXMeasure:
    return DAXMeasure(
        name='Above Threshold',
        expression='CALCULATE(DISTINCTCOUNT(ControversyScore[EntityID]), ControversyScore[Score] >= 4)',
        format_string='#,##0',
        display_folder='Portfolio KPIs',
        description='Count of entities with controversy score >= 4',
    )


def negative_changes() -> DAXMeasure:
    return DAXMeasure(
        name='Negative Changes',
        expression='CALCULATE(COUNTROWS(ControversyScore), ControversyScore[ScoreChange] < 0)',
        format_string='#,##0',
        display_folder='Portfolio KPIs',
        description='Count of negative score changes (deterioration)',
    )


def avg_controversy_score() -> DAXMeasure:
    return DAXMeasure(
        name='Avg Controversy Score',
        expression='AVERAGE(ControversyScore[Score])',
        format_string='0.00',
        display_folder='Portfolio KPIs',
        description='Average controversy score across entities',
    )


def total_market_value() -> DAXMeasure:
    return DAXMeasure(
        name='Total Market Value',
        expression='SUM(PortfolioEntity[MarketValue])',
        format_string='$#,##0.00',
        display_folder='Portfolio KPIs',
        description='Total market value of portfolio entities',
    )


def net_score_change() -> DAXMeasure:
    return DAXMeasure(
        name='Net Score Change',
        expression='SUM(ControversyScore[ScoreChange])',
        format_string='+#,##0;-#,##0;0',
        display_folder='Portfolio KPIs',
        description='Net change in controversy scores (positive = improvement)',
    )


def positive_changes() -> DAXMeasure:
    return DAXMeasure(
        name='Positive Changes',
        expression='CALCULATE(COUNTROWS(ControversyScore), ControversyScore[ScoreChange] > 0)',
        format_string='#,##0',
        display_folder='Portfolio KPIs',
        description='Count of positive score changes (improvement)',
    )


# Social

def avg_engagement_rate() -> DAXMeasure:
    return DAXMeasure(
        name='Avg Engagement Rate',
        expression='AVERAGE(SocialPost[Engagements])',
        format_string='#,##0.0',
        display_folder='Social KPIs',
        description='Average engagements per post',
    )


def positive_sentiment_percent() -> DAXMeasure:
    return DAXMeasure(
        name='Positive Sentiment %',
        expression=_ratio('_Positive', 'CALCULATE(COUNTROWS(SocialPost), SocialPost[Sentiment] = "Positive")',
                          '_Total', 'COUNTROWS(SocialPost)'),
        format_string='0.0%',
        display_folder='Social KPIs',
        description='Percentage of posts with positive sentiment',
    )


def net_sentiment() -> DAXMeasure:
    return DAXMeasure(
        name='Net Sentiment',
        expression=(
            'VAR _Positive = CALCULATE(COUNTROWS(SocialPost), SocialPost[Sentiment] = "Positive")\n'
            'VAR _Negative = CALCULATE(COUNTROWS(SocialPost), SocialPost[Sentiment] = "Negative")\n'
            'VAR _Total = COUNTROWS(SocialPost)\n'
            'RETURN\n'
            'IF(_Total > 0, DIVIDE(_Positive - _Negative, _Total), BLANK())'
        ),
        format_string='0.0%',
        display_folder='Social KPIs',
        description='Net sentiment score ((Positive - Negative) / Total)',
    )


def total_mentions() -> DAXMeasure:
    return DAXMeasure(
        name='Total Mentions',
        expression='SUM(SocialPost[Mentions])',
        format_string='#,##0',
        display_folder='Social KPIs',
        description='Total mentions across all posts',
    )


KPI_CATALOG: Dict[Scenario, Tuple[KPIBuilder, ...]] = {
    Scenario.RETAIL: (margin_percent, yoy_growth, revenue_per_store, avg_order_value),
    Scenario.SAAS: (churn_rate, arr, customer_count, arpu),
    Scenario.HR: (headcount, attrition_rate, avg_performance_rating, avg_tenure),
    Scenario.LOGISTICS: (total_shipments, on_time_rate, avg_shipment_cost,
                         delivered_count, in_transit_count, delayed_count),
    Scenario.FINANCE: (budget_variance_percent, forecast_accuracy, net_variance),
    Scenario.PORTFOLIO: (unique_entities, above_threshold, negative_changes, avg_controversy_score,
                         total_market_value, net_score_change, positive_changes),
    Scenario.SOCIAL: (avg_engagement_rate, positive_sentiment_percent, net_sentiment, total_mentions),
}


def generate_kpi_measures(scenario) -> List[DAXMeasure]:
    """Build the KPI measures of a scenario, homed on its fact table"""
    scenario = Scenario.parse(scenario)
    fact_table = get_fact_table_for_scenario(scenario)
    measures = []
    for builder in KPI_CATALOG.get(scenario, ()):
        measure = builder()
        measure.table = fact_table
        measures.append(measure)
    return measures
