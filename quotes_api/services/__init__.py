"""Business logic services.

Services contain all business logic and are called by routes and resolvers.
Services accept their dependencies explicitly (gateway, store, random source).
"""
