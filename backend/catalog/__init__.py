"""
Restaurant catalog package.

Responsibilities:
- Hold restaurants and their nested dishes in memory.
- Seed the catalog from the processed CSV on first use.
- Provide CRUD plus name, price-tier and geo-radius lookups.
"""
