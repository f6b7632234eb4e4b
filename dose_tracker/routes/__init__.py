"""
Routes package for the Dose Tracker application.

This package contains route blueprints for different sections of the application:
- doses: Listing computed doses and marking them taken
"""
