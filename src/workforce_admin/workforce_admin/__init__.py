"""Workforce Admin package.

Feature modules (clients, employees, attendance, requests, payroll,
invoices, ...) each hold a model, a repository interface with its MySQL
implementation, a service, and a thin Flask JSON controller.
"""
