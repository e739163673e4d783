"""Tk cleaning window and an animated score ring model."""