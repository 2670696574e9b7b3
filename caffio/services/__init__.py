"""
                        Services Module

Business logic for the API, plus the external integrations with the
hybrid Mock (development) / Real (production) pattern.

Domain services:
    - catalog: cafes, menus and menu items
    - availability: open/closed status from business hours
    - orders: order creation and status updates
    - reviews: reviews and the cafe rating aggregate
    - customers: customer accounts and favorites
    - auth: cafe owner signup and login

Integrations:
    - payment: Stripe payment intents
    - geo: Google Maps geocoding
    - notifications: order status notifications (local / Twilio SMS)
"""
