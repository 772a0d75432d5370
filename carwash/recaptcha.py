"""
Google reCAPTCHA v3 verification for the public booking form
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from carwash.config import settings

logger = logging.getLogger(__name__)

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


@dataclass
class CaptchaResult:
    success: bool
    score: Optional[float] = None
    error: Optional[str] = None


def verify_recaptcha(token: Optional[str], action: str = "booking", ip: Optional[str] = None) -> CaptchaResult:
    """
    Verify a reCAPTCHA v3 token.

    Args:
        token: token produced by the client widget
        action: expected action name
        ip: client IP address (optional)

    Returns:
        CaptchaResult; success is True when the check passes or is not configured
    """
    if not settings.recaptcha_secret_key:
        logger.warning("RECAPTCHA_SECRET_KEY not configured - skipping CAPTCHA verification")
        return CaptchaResult(success=True)

    if not token:
        return CaptchaResult(success=False, error="reCAPTCHA token is missing")

    data = {"secret": settings.recaptcha_secret_key, "response": token}
    if ip:
        data["remoteip"] = ip

    try:
        with httpx.Client(timeout=10.0) as client:
            response = client.post(RECAPTCHA_VERIFY_URL, data=data)
            response.raise_for_status()
            result = response.json()
            if not isinstance(result, dict):
                raise ValueError(f"unexpected reply: {result!r}")
    except (httpx.HTTPError, ValueError) as e:
        # Fail open - allow request if verification service is down or replies garbage
        logger.error(f"reCAPTCHA verification error: {e}")
        return CaptchaResult(success=True)

    if not result.get("success", False):
        error_codes = result.get("error-codes", [])
        logger.warning(f"reCAPTCHA verification failed for IP: {ip} - Errors: {error_codes}")
        return CaptchaResult(success=False, error=", ".join(error_codes) or "Verification failed")

    if result.get("action") and result["action"] != action:
        logger.warning(f"reCAPTCHA action mismatch: expected {action}, got {result['action']}")
        return CaptchaResult(success=False, error="Action mismatch")

    score = result.get("score")
    if score is not None and score < settings.recaptcha_min_score:
        logger.warning(f"reCAPTCHA score too low for IP: {ip} ({score})")
        return CaptchaResult(success=False, score=score, error="Score too low")

    return CaptchaResult(success=True, score=score)
