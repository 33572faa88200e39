"""
Business services: order transfer and batch synchronization.
"""
