"""
yomtovcheck – find the class meetings in a course schedule that fall on
Jewish holidays (and Shabbat).
"""
