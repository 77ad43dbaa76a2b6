"""
Product catalog demo - cached product list server and resilient client.
"""
