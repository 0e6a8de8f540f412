import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .core.config import settings

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
templates_dir = os.path.join(BASE_DIR, "templates")

email_templates = Environment(
    loader=FileSystemLoader(templates_dir),
    autoescape=select_autoescape(["html"]),
)
email_templates.globals["app_name"] = settings.APP_NAME
email_templates.globals["frontend_url"] = settings.FRONTEND_URL


def render_email(template_name: str, **context) -> str:
    return email_templates.get_template(f"emails/{template_name}").render(**context)
