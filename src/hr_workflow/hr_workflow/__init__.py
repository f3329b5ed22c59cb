"""HR workflow package.

This package is organized by feature modules (attendance, leave, payroll, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
