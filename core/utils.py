from rest_framework import permissions


class IsClient(permissions.BasePermission):
    message = "Only clients can perform this action."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.is_client


class IsFreelancer(permissions.BasePermission):
    message = "Only freelancers can perform this action."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.is_freelancer
