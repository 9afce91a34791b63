from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class MemberDashboardConfig(AppConfig):
    name = "walletpass.member_dashboard"
    verbose_name = _("Member Dashboard")
