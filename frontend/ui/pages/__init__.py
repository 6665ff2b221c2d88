"""Page components for the portal."""
from frontend.ui.pages.home import render_home_page
from frontend.ui.pages.annadanam import render_annadanam_page
from frontend.ui.pages.pass_page import render_pass_page
from frontend.ui.pages.contact import render_contact_page
from frontend.ui.pages.chat import render_chat_page
from frontend.ui.pages.voice import render_voice_page
from frontend.ui.pages.admin_login import render_admin_login_page
from frontend.ui.pages.admin_annadanam import render_admin_annadanam_page
from frontend.ui.pages.admin_bookings import render_admin_bookings_page
from frontend.ui.pages.admin_donations import render_admin_donations_page
from frontend.ui.pages.admin_contacts import render_admin_contacts_page
from frontend.ui.pages.admin_blocked import render_admin_blocked_page
from frontend.ui.pages.admin_export import render_admin_export_page

__all__ = [
    # Public
    "render_home_page",
    "render_annadanam_page",
    "render_pass_page",
    "render_contact_page",
    "render_chat_page",
    "render_voice_page",
    # Admin
    "render_admin_login_page",
    "render_admin_annadanam_page",
    "render_admin_bookings_page",
    "render_admin_donations_page",
    "render_admin_contacts_page",
    "render_admin_blocked_page",
    "render_admin_export_page",
]
