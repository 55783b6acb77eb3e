"""Base services container for dependency injection."""

from config import Config


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to swap in differently configured services for testing.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        """Initialize services with configuration.

        Args:
            config: Config object containing application configuration.
        """
        self.config = config

        # Lazy import to avoid circular dependencies
        from services.aggregation import AggregationService
        from services.categories import CategoryService
        from services.classification import ClassificationService
        from services.merchants import MerchantService
        from services.subcategories import SubcategoryMatcher
        from services.trends import TrendService

        self.categories = CategoryService(seed_path=config.seed_categories_path)
        self.classification = ClassificationService(
            transfer_window_days=config.transfer_window_days
        )
        self.merchants = MerchantService(seed_path=config.seed_merchants_path)
        self.subcategories = SubcategoryMatcher(self.categories, self.merchants)
        self.aggregation = AggregationService()
        self.trends = TrendService(
            moving_average_period=config.moving_average_period,
            min_trend_months=config.min_trend_months,
        )
