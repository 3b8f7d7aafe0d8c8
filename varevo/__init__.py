"""
varevo - 产品线变体演化的重建

Generates the variants of an annotated software product line at every commit
of its history, together with ground truth linking each generated line back to
the product-line source.
"""

__version__ = "0.1.0"
