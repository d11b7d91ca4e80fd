"""Geofenced attendance service.

Feature modules (geofence, biometrics, attendance, employees, notifications)
sit behind a thin Flask controller layer and service/repository layers.
"""
