"""
End-to-end test procedures: latency, read and size sweeps.
"""
