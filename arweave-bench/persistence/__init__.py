"""
Records, reports and result summaries for the Arweave benchmark.
"""
