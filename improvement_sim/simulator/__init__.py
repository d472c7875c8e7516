"""Simulation core utilities (environment, tracking, engine, driver, metrics, visualisation).

The sub-modules are kept lightweight so the recurrence and the policies can be
unit tested without a scheduler, and so the driver can be reused by any
read-only consumer.
"""
