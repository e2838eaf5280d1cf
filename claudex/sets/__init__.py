"""Configuration set manifests and handling of conflicting install targets."""