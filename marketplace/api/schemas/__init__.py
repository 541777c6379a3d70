# This file marks the schemas package for API response models.
# Resource fields are camelCase on the wire; envelope fields follow the shared EnvelopeFields model.
