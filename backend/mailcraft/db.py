"""
Supabase client configuration.
Supabase Auth owns user records, password hashing and token issuance.
"""

from supabase import create_client, Client

from mailcraft.config import SUPABASE_URL, SUPABASE_KEY, SUPABASE_SERVICE_KEY

if not SUPABASE_URL or not SUPABASE_KEY:
    raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

# Client for user-level operations (sign-up, sign-in, token lookups)
supabase: Client = create_client(SUPABASE_URL, SUPABASE_KEY)

# Admin client for service-level operations (user lookups by id)
supabase_admin: Client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY) if SUPABASE_SERVICE_KEY else None
