"""
WooCommerce export toolkit.

This package provides modular building blocks for:
- Fetching products, variations and customers from the WooCommerce REST API
- Category label mapping and option reconciliation
- Emitting Shopify product/customer CSVs (batched into a ZIP archive)
- Building Trendyol feeds and MerchantPro / Trendyol upload payloads

Public API:
- woocommerce.WooClient
- mapping.CategoryTable, mapping.shopify_taxonomy_table, mapping.load_category_map
- catalog.group_rows, catalog.classify, catalog.has_name_without_value
- options.reconcile_option_names, options.reconcile_row_options
- transform.map_to_shopify_row, transform.export_products
- customers.export_customers
- io.BatchWriter, io.read_rows, io.write_csv
- trendyol.make_feed, trendyol.upload_to_trendyol
- merchantpro.build_payload, merchantpro.upload_to_merchantpro
- clean.clean_directory
- mail.send_mail
"""

from . import (  # re-export modules
    catalog,
    clean,
    clients,
    config,
    customers,
    describe,
    images,
    io,
    mail,
    mapping,
    merchantpro,
    normalize,
    options,
    transform,
    trendyol,
    woocommerce,
)

__all__ = [
    "catalog",
    "clean",
    "clients",
    "config",
    "customers",
    "describe",
    "images",
    "io",
    "mail",
    "mapping",
    "merchantpro",
    "normalize",
    "options",
    "transform",
    "trendyol",
    "woocommerce",
]
