"""pyfdhelm.fem
Reference elements, geometric maps, bulk and face elements.
"""
