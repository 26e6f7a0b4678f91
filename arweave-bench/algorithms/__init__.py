"""
Polling, downloading and verification steps of the Arweave benchmark.
"""
