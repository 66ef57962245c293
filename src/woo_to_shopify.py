#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from woo_shopify.clean import clean_directory
from woo_shopify.clients import emails_csv, fetch_client_emails
from woo_shopify.config import (
    ConfigError,
    ConteConfig,
    MerchantProConfig,
    TrendyolConfig,
    WooConfig,
    env_bool,
    env_float,
    env_int,
    env_str,
    load_env,
)
from woo_shopify.customers import export_customers
from woo_shopify.mapping import load_category_map
from woo_shopify.merchantpro import upload_to_merchantpro
from woo_shopify.transform import export_products
from woo_shopify.trendyol import make_feed, upload_to_trendyol
from woo_shopify.woocommerce import WooClient


def _woo_client() -> WooClient:
    return WooClient(WooConfig.from_env())


def cmd_products(args: argparse.Namespace) -> int:
    summary = export_products(
        _woo_client(),
        per_page=args.per_page,
        batch_size=args.batch,
        status=args.status,
        category_slug=args.category,
        only_one=args.only_one,
        start_page=args.page,
    )
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(summary.archive)
    print(f"Wrote {summary.total_rows} Shopify rows in {len(summary.csv_files)} CSV file(s) to {output}")
    if summary.skipped_variants:
        print(f"Skipped {summary.skipped_variants} variant(s) with an option name but no value")
    if summary.failed_pages:
        print(f"Failed to fetch product page(s): {', '.join(map(str, summary.failed_pages))}")
    return 0


def cmd_customers(args: argparse.Namespace) -> int:
    summary = export_customers(_woo_client(), per_page=args.per_page, active_only=not args.all, start_page=args.page)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(summary.to_csv(), encoding="utf-8")
    print(f"Scanned {summary.scanned} customers, wrote {summary.exported} rows to {output}")
    if summary.failed_pages:
        print(f"Failed to fetch customer page(s): {', '.join(map(str, summary.failed_pages))}")
    return 0


def cmd_trendyol_feed(args: argparse.Namespace) -> int:
    table = load_category_map(args.category_map)
    result = make_feed(
        Path(args.dir),
        Path(args.out),
        table,
        brand_fallback=args.brand,
        currency=args.currency,
        vat_rate=args.vat,
        ignore_unmapped=args.ignore_unmapped,
        limit=args.limit,
    )
    print(f"Wrote {len(result.rows)} Trendyol rows to {args.out}")
    if args.limit > 0:
        print(f"(test mode: limited to {args.limit} product{'s' if args.limit > 1 else ''})")
    for value, count in result.unmapped.items():
        print(f'  unmapped: "{value}" ({count} products)')
    return 0


def cmd_clean_csvs(args: argparse.Namespace) -> int:
    results = clean_directory(Path(args.dir), mode=args.mode)
    for r in results:
        print(f"{r.source.name} -> {r.output.name} | removed rows (name w/o value): {r.removed} | mapped ({args.mode}): {r.mapped}")
        for value, count in r.unmapped.items():
            print(f'   - "{value}" ({count} rows)')
    return 0


def cmd_push_merchantpro(args: argparse.Namespace) -> int:
    cfg = MerchantProConfig.from_env()
    client = _woo_client()
    products = client.collect_products(args.per_page, args.status, limit=args.limit)
    result = upload_to_merchantpro(products, cfg, lambda p, vid: client.fetch_variation(p.get("id"), vid))
    print(f"MerchantPro: uploaded={result.uploaded} failed={result.failed}")
    return 0 if result.failed == 0 else 2


def cmd_push_trendyol(args: argparse.Namespace) -> int:
    cfg = TrendyolConfig.from_env()
    client = _woo_client()
    products = client.collect_products(args.per_page, args.status, limit=args.limit)
    upload_to_trendyol(products, cfg)
    print(f"Trendyol: uploaded {len(products)} products")
    return 0


def cmd_client_emails(args: argparse.Namespace) -> int:
    emails = fetch_client_emails(ConteConfig.from_env())
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(emails_csv(emails), encoding="utf-8")
    print(f"Wrote {len(emails)} client emails to {output}")
    return 0


def build_parser(parents=()) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export WooCommerce data to Shopify, Trendyol and MerchantPro.", parents=list(parents))
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v for INFO, -vv for DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("products", help="Export products as batched Shopify CSVs in a ZIP")
    p.add_argument("--output", default="woocommerce_products_batches.zip", help="Path of the ZIP archive to write")
    p.add_argument("--batch", type=int, default=env_int("BATCH_SIZE", 2000), help="Rows per CSV file")
    p.add_argument("--per-page", type=int, default=env_int("PER_PAGE", 100), help="Products per API page (max 100)")
    p.add_argument("--status", default=env_str("WOO_STATUS", "publish"), help="publish | draft | any ...")
    p.add_argument("--category", default="", help="Only export products of this category slug")
    p.add_argument("--page", type=int, default=1, help="Start page")
    p.add_argument("--only-one", action="store_true", help="Export only the first variable product")
    p.set_defaults(func=cmd_products)

    p = sub.add_parser("customers", help="Export customers as a Shopify customer CSV")
    p.add_argument("--output", default="woocommerce_customers_export.csv")
    p.add_argument("--per-page", type=int, default=env_int("PER_PAGE", 100))
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--all", action="store_true", help="Include customers without orders")
    p.set_defaults(func=cmd_customers)

    p = sub.add_parser("trendyol-feed", help="Build a Trendyol CSV from a folder of Shopify product CSVs")
    p.add_argument("--dir", default="static/products")
    p.add_argument("--out", default="static/trendyol/trendyol_products.csv")
    p.add_argument("--limit", type=int, default=0, help="0 = all products")
    p.add_argument("--brand", default=env_str("BRAND_FALLBACK", "CONTE"))
    p.add_argument("--currency", default=env_str("CURRENCY", "RON"))
    p.add_argument("--vat", type=int, default=int(env_float("VAT_RATE", 19)))
    p.add_argument("--category-map", default=env_str("CATEGORY_MAP", "scripts/trendyol-category-map.json"))
    p.add_argument(
        "--ignore-unmapped",
        action="store_true",
        default=env_bool("IGNORE_UNMAPPED"),
        help="Skip products whose category has no Trendyol id",
    )
    p.set_defaults(func=cmd_trendyol_feed)

    p = sub.add_parser("clean-csvs", help="Drop invalid option rows and map categories in Shopify CSVs")
    p.add_argument("--dir", default="static/products")
    p.add_argument("--mode", default="taxonomy", choices=["taxonomy", "breadcrumbs"])
    p.set_defaults(func=cmd_clean_csvs)

    for name, func, what in (
        ("push-merchantpro", cmd_push_merchantpro, "MerchantPro"),
        ("push-trendyol", cmd_push_trendyol, "Trendyol"),
    ):
        p = sub.add_parser(name, help=f"Upload WooCommerce products to {what}")
        p.add_argument("--per-page", type=int, default=env_int("PER_PAGE", 100))
        p.add_argument("--status", default=env_str("WOO_STATUS", "publish"))
        p.add_argument("--limit", type=int, default=0, help="0 = all products")
        p.set_defaults(func=func)

    p = sub.add_parser("client-emails", help="Export the B2B client e-mail list")
    p.add_argument("--output", default="client_emails.csv")
    p.set_defaults(func=cmd_client_emails)
    return parser


def main(argv=None) -> int:
    # Early parse to pick up --env-file, then build the parser with env-populated defaults
    env_only = argparse.ArgumentParser(add_help=False)
    env_only.add_argument("--env-file", default="")
    early_args, _ = env_only.parse_known_args(argv)
    load_env(early_args.env_file or None)

    args = build_parser(parents=[env_only]).parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    return args.func(args)


def run() -> None:
    try:
        sys.exit(main())
    except (ConfigError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logging.getLogger(__name__).debug("Unhandled error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
