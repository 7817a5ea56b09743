"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/ - Realtime gateway; the socket identifies itself with a
               {"type": "connect", "userId": N} frame

Authentication:
    A JWT may be passed as ?token=<jwt_access_token> or via the
    ["jwt", <token>] subprotocol. When present, JWTAuthMiddleware attaches
    the user to the scope and the connect frame must name the same user.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/chat/", consumers.ChatGatewayConsumer.as_asgi()),
]
