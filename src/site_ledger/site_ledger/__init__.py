"""Site Ledger package.

This package is organized by feature modules (places, records, payroll, ...)
with a thin Flask controller layer over service/repository layers and a
pluggable document store underneath.
"""
