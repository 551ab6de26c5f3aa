"""
User accounts: model, validation schemas, credential store and management service.
"""
