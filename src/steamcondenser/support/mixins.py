def quote(val):
    return "'" + str(val) + "'" if val is not None else "None"


class StringerMixin:

    def __str__(self):
        """
        outputs the class name and the public attributes in key sorted order
        """
        return type(self).__name__ + ':' + self._sorted_items_string()

    def _sorted_items_string(self):
        return "{" + ", ".join(["'" + str(key) + "': " + quote(val)
                                for key, val in sorted(self.__dict__.items())
                                if not key.startswith('_')]) + "}"


class CommonEqualityMixin(object):
    """  equality by value for small value objects. """

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(tuple(sorted(self.__dict__.items())))
