"""Waitlist signup service: public signup form, email notifications and admin API."""
