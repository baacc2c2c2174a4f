"""
Wishlist URL Configuration
"""
from rest_framework.routers import DefaultRouter
from .views import WishlistViewSet

app_name = 'wishlists'

router = DefaultRouter()
router.register(r'', WishlistViewSet, basename='wishlist')

urlpatterns = router.urls
