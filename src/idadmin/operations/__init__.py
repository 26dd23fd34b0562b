"""Operations module: request builders and typed operation managers."""
