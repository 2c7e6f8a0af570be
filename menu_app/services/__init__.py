"""
                        Services Module

Business logic used by the routes. Collaborators with an in-process
(development) and an external (production) implementation sit behind a
factory:

Services:
    - auth: signup, login and profiles
    - meals: catalog listing and administrator CRUD
    - comments: comments on a meal
    - sessions: memory / Redis session store
    - storage: local / Supabase image storage
"""
