from __future__ import annotations
import logging
import smtplib
from typing import Dict, List, Optional, Union

import requests
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from woo_shopify import mail
from woo_shopify.clients import emails_csv, fetch_client_emails
from woo_shopify.config import (
    ConfigError,
    ConteConfig,
    MailConfig,
    MerchantProConfig,
    TrendyolConfig,
    WooConfig,
    google_mail_config,
    load_env,
    nomadic_mail_config,
)
from woo_shopify.customers import export_customers
from woo_shopify.merchantpro import upload_to_merchantpro
from woo_shopify.transform import export_products
from woo_shopify.trendyol import upload_to_trendyol
from woo_shopify.woocommerce import WooClient, clamp_per_page


logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
log = logging.getLogger(__name__)
load_env()

app = FastAPI(title="WooCommerce → Shopify API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

GREETING = {"message": "Hello from GET!"}


class EmailRequest(BaseModel):
    to: Union[str, List[str]]
    subject: str = ""
    text: str = ""
    html: str = ""
    fromDisplayName: Optional[str] = None


def _configured(factory):
    try:
        return factory()
    except ConfigError as e:
        raise HTTPException(500, f"{e}. Set them in .env or as environment variables.")


def get_woo_client() -> WooClient:
    return WooClient(_configured(WooConfig.from_env))


def get_merchantpro_config() -> MerchantProConfig:
    return _configured(MerchantProConfig.from_env)


def get_trendyol_config() -> TrendyolConfig:
    return _configured(TrendyolConfig.from_env)


def get_conte_config() -> ConteConfig:
    return _configured(ConteConfig.from_env)


def get_google_mail() -> MailConfig:
    return _configured(google_mail_config)


def get_nomadic_mail() -> MailConfig:
    return _configured(nomadic_mail_config)


def _failure(prefix: str, exc: Exception) -> JSONResponse:
    log.error("%s ERROR: %s", prefix, exc)
    return JSONResponse({"success": False, "error": str(exc)}, status_code=500)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/woocommerce/products")
def woo_products(
    csv: str = "",
    batch: int = 2000,
    per_page: int = 100,
    category: str = "",
    status: str = "publish",
    only_one: str = "",
    page: int = 1,
    client: WooClient = Depends(get_woo_client),
):
    batch = max(1, batch)
    per_page = clamp_per_page(per_page)
    status = (status or "publish").lower()
    try:
        summary = export_products(
            client,
            per_page=per_page,
            batch_size=batch,
            status=status,
            category_slug=category,
            only_one=only_one == "1",
            start_page=page,
        )
    except requests.RequestException as e:
        return _failure("[Woo Export]", e)

    if csv == "1":
        return Response(
            content=summary.archive,
            media_type="application/zip",
            headers={"Content-Disposition": "attachment; filename=woocommerce_products_batches.zip"},
        )
    return {
        "success": True,
        "message": "Exported the first variable product only" if summary.exported_one else "Batches prepared in ZIP",
        **summary.to_dict(),
        "per_page": per_page,
        "batch": batch,
        "status": status,
        "category": category or None,
        "only_one": only_one == "1",
    }


@app.get("/api/woocommerce/customers")
def woo_customers(
    csv: str = "",
    per_page: int = 100,
    active: str = "1",
    page: int = 1,
    client: WooClient = Depends(get_woo_client),
):
    per_page = clamp_per_page(per_page)
    active_only = active == "1"
    try:
        summary = export_customers(client, per_page=per_page, active_only=active_only, start_page=page)
    except requests.RequestException as e:
        return _failure("[Woo Customers Export]", e)

    if csv == "1":
        filename = f"woocommerce_customers_{'active_' if active_only else ''}export.csv"
        return Response(
            content=summary.to_csv(),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    return {
        "success": True,
        "message": f"Prepared {summary.exported} customer rows{' (active only)' if active_only else ''}.",
        "total_customers_scanned": summary.scanned,
        "exported_rows": summary.exported,
        "failed_pages": len(summary.failed_pages),
        "per_page": per_page,
        "active_only": active_only,
    }


@app.post("/api/woocommerce/push/merchantpro")
def push_merchantpro(
    per_page: int = 100,
    status: str = "publish",
    limit: int = 0,
    client: WooClient = Depends(get_woo_client),
    cfg: MerchantProConfig = Depends(get_merchantpro_config),
):
    try:
        products = client.collect_products(per_page, status, limit=limit)
    except requests.RequestException as e:
        return _failure("[MerchantPro]", e)
    result = upload_to_merchantpro(products, cfg, lambda p, vid: client.fetch_variation(p.get("id"), vid))
    return {"success": True, **result.to_dict()}


@app.post("/api/woocommerce/push/trendyol")
def push_trendyol(
    per_page: int = 100,
    status: str = "publish",
    limit: int = 0,
    client: WooClient = Depends(get_woo_client),
    cfg: TrendyolConfig = Depends(get_trendyol_config),
):
    try:
        products = client.collect_products(per_page, status, limit=limit)
        result = upload_to_trendyol(products, cfg)
    except requests.RequestException as e:
        return _failure("[Trendyol]", e)
    return {"success": True, "uploaded": len(products), "result": result}


def _send(req: EmailRequest, cfg: MailConfig, display_name: Optional[str]):
    try:
        mail.send_mail(cfg, req.to, req.subject, req.text, req.html, from_display_name=display_name)
    except (smtplib.SMTPException, OSError) as e:
        log.error("Error sending email: %s", e)
        return JSONResponse({"error": "Failed to send email"}, status_code=500)
    return {"message": "Email sent!"}


@app.post("/api/sendEmail")
def send_email(req: EmailRequest, cfg: MailConfig = Depends(get_google_mail)):
    return _send(req, cfg, None)


@app.get("/api/sendEmail")
def send_email_greeting():
    return GREETING


@app.post("/api/sendEmailNomadic")
def send_email_nomadic(req: EmailRequest, cfg: MailConfig = Depends(get_nomadic_mail)):
    return _send(req, cfg, req.fromDisplayName)


@app.get("/api/sendEmailNomadic")
def send_email_nomadic_greeting():
    return GREETING


@app.get("/api/getConteClientEmails")
def conte_client_emails(cfg: ConteConfig = Depends(get_conte_config)):
    try:
        emails = fetch_client_emails(cfg)
    except requests.RequestException as e:
        log.error("Error exporting emails: %s", e)
        return PlainTextResponse("Error generating CSV", status_code=500)
    return Response(
        content=emails_csv(emails),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="client_emails.csv"'},
    )


if __name__ == "__main__":
    import uvicorn
    from woo_shopify.config import env_int, env_str

    uvicorn.run(
        "server.app:app",
        host=env_str("API_HOST", "127.0.0.1"),
        port=env_int("API_PORT", 8000),
    )
