# API Routers
from app.routers import auth, reservations, catalog, payments

__all__ = ['auth', 'reservations', 'catalog', 'payments']
