"""Main entry point for the risk analytics engine"""

from pathlib import Path
from dotenv import load_dotenv

# Load environment variables FIRST, before any other imports
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

from risk_engine.data.transaction_loader import load_transactions
from risk_engine.orchestrator.analytics_orchestrator import RiskAnalyticsOrchestrator
from risk_engine.utils.logging import get_logger

logger = get_logger(__name__)


def main():
    """Main entry point"""
    logger.info("=" * 60)
    logger.info("RETAIL RISK ANALYTICS")
    logger.info("=" * 60)

    try:
        transactions = load_transactions()
        orchestrator = RiskAnalyticsOrchestrator()

        results = orchestrator.run_analytics_cycle(transactions)

        logger.info("=" * 60)
        logger.info("ANALYTICS SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Run ID: {results['run_id']}")
        logger.info(f"Transactions: {results['transaction_count']}")
        logger.info(f"Employees: {results['employee_count']}, Customers: {results['customer_count']}")
        logger.info(f"Anomalies: {len(results['anomalies'])}")
        logger.info("Dashboard KPIs", **results['dashboard'])
        for summary in results['top_employees']:
            logger.info(
                f"Top risk employee: {summary.name}",
                avg_risk=round(summary.avg_risk, 1),
                transactions=summary.total_transactions
            )
        for summary in results['top_customers']:
            logger.info(
                f"Top risk customer: {summary.name}",
                avg_risk=round(summary.avg_risk, 1),
                transactions=summary.total_transactions
            )
        logger.info(f"Duration: {results['duration_seconds']:.3f}s")
        logger.info("=" * 60)

        return results

    except Exception as e:
        logger.error(f"Main execution failed: {e}")
        raise


if __name__ == "__main__":
    main()
