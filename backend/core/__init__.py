"""
core - domain framework layer, independent of the web application

- engine: generic engines (state machine)
- payments: payment allocation & reconciliation engine

Usage:
    >>> from core.payments import PaymentCalculator, CalculationInput
    >>> from core.engine import StateMachine
"""
