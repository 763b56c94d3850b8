"""URL configuration for the chalet booking project.

Routes the Django admin, staff JWT tokens, the versioned REST API of
each app and the OpenAPI schema.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    # Staff authentication
    path('api/v1/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/v1/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    # Application URLs
    path('api/v1/', include('apps.rooms.urls')),
    # access-codes/validate/ must resolve before the admin access-codes routes
    path('api/v1/', include('apps.bookings.urls')),
    path('api/v1/', include('apps.configuration.urls')),
    # API schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
