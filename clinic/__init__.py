"""Clinic application for the rehab center backend.

This package contains models, serializers, services, views and route
registrations for patients, payments, staff payroll, graduates, the
cigarette allowance and the settings/database administration.
"""
