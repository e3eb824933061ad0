# Business Services
from app.services.employee_service import EmployeeService
from app.services.reservation_service import ReservationService
from app.services.catalog_service import CatalogService, DatabaseCatalogSource
from app.services.payment_service import PaymentService

__all__ = [
    'EmployeeService', 'ReservationService', 'CatalogService',
    'DatabaseCatalogSource', 'PaymentService'
]
