"""Nursing application for the ward backend.

This package holds the models, serializers, services, views and route
registrations for nurse accounts, patient records, visits, prescriptions,
lab reports and their binary attachments.
"""
