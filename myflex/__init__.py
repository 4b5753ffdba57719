"""
MyFlex meal-planning service.

Users log meals, manage a fridge and receive AI-assisted dish
recommendations and meal plans; administrators curate the dish catalog,
promotions and notifications.
"""
