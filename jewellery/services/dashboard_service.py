import logging
from collections import defaultdict
from decimal import Decimal

from sqlalchemy.orm import Session

from jewellery.db.repository import GenericRepository
from jewellery.models.entities import Order, Product
from jewellery.models.schemas import ApiResponse, DashboardStatsDto, MonthlyRevenueDto
from jewellery.services.order_service import ORDER_INCLUDES, to_order_response
from jewellery.services.product_service import to_product_response

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5
RECENT_ORDERS = 5
REVENUE_MONTHS = 6


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.orders = GenericRepository(Order, db)
        self.products = GenericRepository(Product, db)

    def get_stats(self) -> ApiResponse[DashboardStatsDto]:
        try:
            orders = self.orders.get_all_with_includes(includes=ORDER_INCLUDES)
            products = self.products.get_all_with_includes(includes=("category",))

            by_month = defaultdict(Decimal)
            for order in orders:
                by_month[order.order_date.strftime("%Y-%m")] += order.total_amount
            monthly = [MonthlyRevenueDto(month=m, revenue=by_month[m]) for m in sorted(by_month)]

            recent = sorted(orders, key=lambda o: (o.order_date, o.id), reverse=True)[:RECENT_ORDERS]
            stats = DashboardStatsDto(
                total_orders=len(orders),
                total_products=len(products),
                total_revenue=sum((o.total_amount for o in orders), Decimal("0")),
                recent_orders=[to_order_response(o) for o in recent],
                low_stock_products=[to_product_response(p) for p in products if p.stock < LOW_STOCK_THRESHOLD],
                monthly_revenue=monthly[-REVENUE_MONTHS:],
            )
            return ApiResponse[DashboardStatsDto].success_response(stats)
        except Exception as e:
            logger.exception("Error building dashboard stats")
            return ApiResponse[DashboardStatsDto].error_response("Error retrieving dashboard stats", [str(e)])
