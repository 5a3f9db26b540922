"""CRM notification service.

Rule-driven notifications for tasks, projects, prospects and bookings, served
by the FastAPI application built in the top-level ``main`` module.
"""
