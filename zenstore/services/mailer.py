"""Interest request confirmation emails via Resend."""

from __future__ import annotations

import logging
from html import escape
from typing import Any, Dict, Optional

import resend

logger = logging.getLogger(__name__)


class MailNotConfigured(RuntimeError):
    pass


class Mailer:
    """Thin synchronous wrapper around the Resend SDK."""

    def __init__(self, api_key: Optional[str], from_address: Optional[str], shop_name: str = "Zen Online Shop") -> None:
        self._api_key = api_key
        self._from_address = from_address
        self._shop_name = shop_name

    def is_configured(self) -> bool:
        return bool(self._api_key and self._from_address)

    def send_interest_confirmation(self, order: Dict[str, Any]) -> Dict[str, Any]:
        if not self.is_configured():
            raise MailNotConfigured("RESEND_API_KEY or MAIL_FROM not set")

        resend.api_key = self._api_key
        params: resend.Emails.SendParams = {
            "from": self._from_address,
            "to": [order["email"]],
            "subject": f"Бүтээгдэхүүний хүсэлт: {order['laptop_choice']}",
            "html": self.render_confirmation(order),
        }
        response = resend.Emails.send(params)
        logger.info(f"Confirmation email sent to {order['email']}, response={response}")
        return response

    def render_confirmation(self, order: Dict[str, Any]) -> str:
        username = escape(order.get("username") or "")
        choice = escape(order.get("laptop_choice") or "")
        phone = escape(order.get("phone_number") or "")
        link = order.get("product_link")
        link_html = ""
        if link:
            safe_link = escape(link, quote=True)
            link_html = (
                '<p style="font-size: 16px; line-height: 1.5; margin-bottom: 10px;">'
                f'Бүтээгдэхүүний линк: <a href="{safe_link}" style="color: #007bff; text-decoration: none;">{safe_link}</a></p>'
            )
        return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
        <h1 style="font-size: 24px; color: #333333; margin-bottom: 20px;">Сайн байна уу, {username},</h1>
        <div style="background-color: #f9f9f9; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
          <p style="font-size: 16px; line-height: 1.5; margin-bottom: 10px;">Таны {choice} бүтээгдэхүүний сонирхол амжилттай бүртгэгдлээ. Баярлалаа.</p>
          <p style="font-size: 16px; line-height: 1.5; margin-bottom: 10px;">Таны утасны дугаар: <strong>{phone}</strong></p>
          {link_html}
          <p style="font-size: 16px; line-height: 1.5; margin-bottom: 10px;">Бид тантай тун удахгүй холбогдох болно.</p>
        </div>
        <div style="margin-top: 20px; border-top: 1px solid #eeeeee; padding-top: 20px;">
          <p style="font-size: 14px; color: #555555; margin-bottom: 5px;">Хүндэтгэсэн,</p>
          <p style="font-size: 16px; font-weight: bold; color: #333333;">{escape(self._shop_name)}</p>
        </div>
      </div>
    """
