"""
services/sms.py

SMS 템플릿 렌더링 및 발송 서비스.

실제 SMS 게이트웨이는 연동하지 않으며,
발송 요청은 로그로만 남긴다. (게이트웨이 교체 시 send_sms 만 수정)

템플릿 본문의 {placeholder} 는 발송 시 전달한 값으로 치환되고,
전달되지 않은 placeholder 는 그대로 남는다.

"""

import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


DEFAULT_TEMPLATES: dict[str, str] = {
    "otp_login": "Your OTP is {otp}. Valid for {minutes} minutes. - {app_name}",
    "account_approved": "Hi {user_name}, your account has been approved! You can now log in to {app_name}.",
    "account_rejected": "Hi {user_name}, your registration has been declined. Reason: {reason}",
    "account_pending": "Hi {user_name}, your account status has been changed to pending review.",
    "post_approved": 'Hi {user_name}, your post "{post_title}" has been approved and published!',
    "post_rejected": "Hi {user_name}, your post was not approved. Reason: {reason}",
    "event_reminder": "Reminder: {event_name} is on {event_date}!",
    "welcome": "Welcome to {app_name}, {user_name}! We are glad to have you.",
}


class _KeepMissing(dict):
    def __missing__(self, key):
        return "{" + key + "}"


def render_template(key: str, variables: dict | None = None) -> str:
    template = DEFAULT_TEMPLATES.get(key)
    if template is None:
        raise ValueError(f"Unknown SMS template: {key}")
    values = _KeepMissing(app_name=settings.APP_NAME)
    values.update({k: str(v) for k, v in (variables or {}).items()})
    return template.format_map(values)


# 운영 환경에서는 본문(OTP 포함)을 로그에 남기지 않음
def send_sms(mobile_number: str, message: str) -> bool:
    if settings.is_dev:
        logger.info("SMS to %s: %s", mobile_number, message)
    else:
        logger.info("SMS to %s dispatched (%d chars)", mobile_number, len(message))
    return True


def send_templated_sms(mobile_number: str, key: str, variables: dict | None = None) -> bool:
    return send_sms(mobile_number, render_template(key, variables))
