"""
Transport adapters: the gateway read path and the Arweave upload path.
"""
