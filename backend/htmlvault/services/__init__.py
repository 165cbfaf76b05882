# Services package init
"""
HTMLVault Backend — Services Layer
====================================

Service Inventory:
    - ContentService: validation and one SQL statement per content operation

Services receive the database session per call and raise the exceptions in
htmlvault.exceptions; they know nothing about HTTP.
"""
