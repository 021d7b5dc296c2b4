"""
infrastructure.content - Content Source adapter for the Sanity CMS.
"""
