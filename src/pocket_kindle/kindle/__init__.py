"""Send-to-Kindle delivery."""

from .encoder import HtmlBundleEncoder
from .mailer import SmtpKindleMailer

__all__ = [
    "HtmlBundleEncoder",
    "SmtpKindleMailer",
]
