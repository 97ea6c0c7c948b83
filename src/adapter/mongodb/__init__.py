USERS_COLLECTION_NAME = 'users'
USER_PROVIDERS_COLLECTION_NAME = 'user_providers'
USER_PROFILES_COLLECTION_NAME = 'user_profiles'
SESSIONS_COLLECTION_NAME = 'user_sessions'
