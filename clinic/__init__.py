"""Clinic application for the HMIS backend.

This package contains models, serializers, services, views and route
registrations implementing the REST API the front-end talks to.
"""
