from functools import wraps

from algorithms.exceptions import NotADonor


def donor_required(view_func):
    """
    Reject callers whose role cannot donate.
    Raises NotADonor, which the API exception handler turns into a 403.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        user = request.user
        if not getattr(user, 'is_donor', False):
            raise NotADonor()
        return view_func(request, *args, **kwargs)
    return wrapper
