"""SOCRATIX tutor HTTP boundary"""
