"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP, no business logic):

  time_info - get_display_time(): the H:MM:SS AM/PM time shown under each message.
  markup    - render_markup(text): escape untrusted text and turn a tiny markdown subset into HTML.
"""
