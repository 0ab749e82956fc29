"""
Cinnamon URL Configuration

Two routes: the root starts a login, the provider sends users back to
/authorised. For more information please see:
    https://docs.djangoproject.com/en/dev/topics/http/urls/
"""

from django.urls import path

from Cinnamon.sso import oauth as auth

urlpatterns = [
    path("", auth.OAuthInitializeView.as_view(), name="oauth_login"),
    path("authorised", auth.OAuthCallbackView.as_view(), name="oauth_callback"),
]
