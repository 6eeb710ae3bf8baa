"""
Payments Module

Gateway order creation, the single place where amounts are converted between
major and minor currency units, and verification of the signed payment
confirmation the gateway returns to the browser.

Import the HTTP endpoints from ``gatepass.payments.router``.
"""
