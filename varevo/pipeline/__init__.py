"""
Pipeline - dataset loading, history sequencing and variant generation steps.
"""
