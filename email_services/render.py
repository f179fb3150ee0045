from pathlib import Path
from typing import Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from settings.config import get_settings


_TEMPLATES_DIR = Path(__file__).parent / "templates"
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)

_SUBJECTS = {
    "approved": "Your vendor registration has been approved",
    "rejected": "Update on your vendor registration",
}


def render_registration_email(
    event: str,
    business_name: Optional[str],
    contact_name: Optional[str],
    reason: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Render the subject and HTML body for an approval/rejection notice.
    """
    if event not in _SUBJECTS:
        raise ValueError(f"Unsupported registration email event: {event}")
    settings = get_settings()
    template = _env.get_template(f"registration_{event}.html")
    html = template.render(
        business_name=business_name or "your business",
        contact_name=contact_name or "there",
        reason=reason,
        company_name=settings.COMPANY_NAME or settings.APP_NAME,
        support_email=settings.SUPPORT_EMAIL,
    )
    return _SUBJECTS[event], html
