"""
Fixture/prediction reconciliation engine.
Merges a provider's fixture list with a user's stored predictions into one
annotated view with stats and a data-quality report.
"""
