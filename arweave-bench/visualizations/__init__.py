"""
Plots of latency test results.
"""
