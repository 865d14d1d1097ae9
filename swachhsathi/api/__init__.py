"""
SwachhSathi - REST API
"""
