"""
HTTP routes, one router per area:
    - auth: signup, login, logout, profile
    - menu: public menu, meal detail, comments
    - meals: administrator catalog management
"""

from menu_app.routes import auth, meals, menu

__all__ = ["auth", "meals", "menu"]
