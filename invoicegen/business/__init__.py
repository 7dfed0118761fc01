# ==== BUSINESS LOGIC PACKAGE ==== #

"""
Business logic package for domain errors shared by services and routes.
"""
